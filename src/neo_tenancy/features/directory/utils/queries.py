"""Directory SQL query constants.

All queries are parameterized by schema via ``str.format(schema=...)`` and
take positional asyncpg arguments.
"""

# Organization queries
ORGANIZATION_INSERT = """
    INSERT INTO {schema}.organizations (
        id, name, slug, owner_id, logo, metadata, settings, allowed_domains,
        status, created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
    RETURNING *
"""

ORGANIZATION_UPDATE = """
    UPDATE {schema}.organizations SET
        name = $2,
        slug = $3,
        owner_id = $4,
        logo = $5,
        metadata = $6,
        settings = $7,
        allowed_domains = $8,
        status = $9,
        updated_at = $10
    WHERE id = $1
    RETURNING *
"""

ORGANIZATION_GET_BY_ID = """
    SELECT * FROM {schema}.organizations WHERE id = $1
"""

ORGANIZATION_GET_BY_SLUG = """
    SELECT * FROM {schema}.organizations WHERE slug = $1
"""

ORGANIZATION_LIST_ALL = """
    SELECT * FROM {schema}.organizations ORDER BY created_at
"""

ORGANIZATION_DELETE = """
    DELETE FROM {schema}.organizations WHERE id = $1
"""

# Member queries
MEMBER_INSERT = """
    INSERT INTO {schema}.members (
        id, organization_id, user_id, role, status, suspended_at, joined_at,
        created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
    RETURNING *
"""

MEMBER_UPDATE = """
    UPDATE {schema}.members SET
        role = $2,
        status = $3,
        suspended_at = $4,
        joined_at = $5,
        updated_at = $6
    WHERE id = $1
    RETURNING *
"""

MEMBER_GET_BY_ORGANIZATION_AND_USER = """
    SELECT * FROM {schema}.members WHERE organization_id = $1 AND user_id = $2
"""

MEMBER_LIST_BY_ORGANIZATION = """
    SELECT * FROM {schema}.members
    WHERE organization_id = $1 AND ($2::text IS NULL OR status = $2)
    ORDER BY created_at
"""

MEMBER_COUNT_BY_ORGANIZATION = """
    SELECT COUNT(*) FROM {schema}.members
    WHERE organization_id = $1 AND ($2::text IS NULL OR status = $2)
"""

MEMBER_LIST_BY_USER = """
    SELECT * FROM {schema}.members WHERE user_id = $1 ORDER BY created_at
"""

MEMBER_DELETE = """
    DELETE FROM {schema}.members WHERE id = $1
"""

MEMBER_DELETE_BY_ORGANIZATION = """
    DELETE FROM {schema}.members WHERE organization_id = $1
"""

# Team queries
TEAM_INSERT = """
    INSERT INTO {schema}.teams (
        id, organization_id, name, slug, parent_team_id, description, metadata,
        created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
    RETURNING *
"""

TEAM_UPDATE = """
    UPDATE {schema}.teams SET
        name = $2,
        slug = $3,
        parent_team_id = $4,
        description = $5,
        metadata = $6,
        updated_at = $7
    WHERE id = $1
    RETURNING *
"""

TEAM_GET_BY_ID = """
    SELECT * FROM {schema}.teams WHERE id = $1
"""

TEAM_GET_BY_SLUG = """
    SELECT * FROM {schema}.teams WHERE organization_id = $1 AND slug = $2
"""

TEAM_LIST_BY_ORGANIZATION = """
    SELECT * FROM {schema}.teams WHERE organization_id = $1 ORDER BY created_at
"""

TEAM_COUNT_BY_ORGANIZATION = """
    SELECT COUNT(*) FROM {schema}.teams WHERE organization_id = $1
"""

TEAM_LIST_CHILDREN = """
    SELECT * FROM {schema}.teams WHERE parent_team_id = $1 ORDER BY created_at
"""

TEAM_DELETE = """
    DELETE FROM {schema}.teams WHERE id = $1
"""

# Team member queries
TEAM_MEMBER_INSERT = """
    INSERT INTO {schema}.team_members (id, team_id, user_id, role, created_at)
    VALUES ($1, $2, $3, $4, $5)
    RETURNING *
"""

TEAM_MEMBER_UPDATE = """
    UPDATE {schema}.team_members SET role = $2 WHERE id = $1 RETURNING *
"""

TEAM_MEMBER_GET = """
    SELECT * FROM {schema}.team_members WHERE team_id = $1 AND user_id = $2
"""

TEAM_MEMBER_LIST_BY_TEAM = """
    SELECT * FROM {schema}.team_members WHERE team_id = $1 ORDER BY created_at
"""

TEAM_MEMBER_LIST_BY_ORGANIZATION_AND_USER = """
    SELECT tm.* FROM {schema}.team_members tm
    JOIN {schema}.teams t ON t.id = tm.team_id
    WHERE t.organization_id = $1 AND tm.user_id = $2
    ORDER BY tm.created_at
"""

TEAM_MEMBER_DELETE = """
    DELETE FROM {schema}.team_members WHERE id = $1
"""

TEAM_MEMBER_DELETE_BY_TEAM = """
    DELETE FROM {schema}.team_members WHERE team_id = $1
"""

# Invitation queries
INVITATION_INSERT = """
    INSERT INTO {schema}.invitations (
        id, organization_id, invitee_identifier, identifier_type, role, team_id,
        inviter_id, inviter_name, message, status, expires_at, created_at, updated_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
    RETURNING *
"""

INVITATION_UPDATE = """
    UPDATE {schema}.invitations SET
        role = $2,
        team_id = $3,
        message = $4,
        status = $5,
        expires_at = $6,
        updated_at = $7
    WHERE id = $1
    RETURNING *
"""

INVITATION_GET_BY_ID = """
    SELECT * FROM {schema}.invitations WHERE id = $1
"""

INVITATION_FIND = """
    SELECT * FROM {schema}.invitations
    WHERE organization_id = $1 AND invitee_identifier = $2 AND status = $3
    ORDER BY created_at DESC
    LIMIT 1
"""

INVITATION_LIST_BY_ORGANIZATION = """
    SELECT * FROM {schema}.invitations
    WHERE organization_id = $1 AND ($2::text IS NULL OR status = $2)
    ORDER BY created_at DESC
"""

INVITATION_LIST_BY_IDENTIFIER = """
    SELECT * FROM {schema}.invitations
    WHERE invitee_identifier = $1 AND ($2::text IS NULL OR status = $2)
    ORDER BY created_at DESC
"""

INVITATION_DELETE_BY_ORGANIZATION = """
    DELETE FROM {schema}.invitations WHERE organization_id = $1
"""
