from .member_service import MemberService, insert_member_in_transaction

__all__ = ["MemberService", "insert_member_in_transaction"]
