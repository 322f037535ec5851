from .cursor import decode_cursor, encode_cursor, paginate_newest_first

__all__ = ["decode_cursor", "encode_cursor", "paginate_newest_first"]
