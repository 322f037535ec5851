"""Authorization SQL query constants.

Schema is substituted via ``str.format(schema=...)``.
"""

# Role assignment queries
ROLE_ASSIGNMENT_UPSERT = """
    INSERT INTO {schema}.role_assignments (
        id, user_id, role, scope_type, scope_id, expires_at, assigned_by, created_at
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, NOW())
    ON CONFLICT (user_id, role, scope_type, scope_id)
    DO UPDATE SET expires_at = EXCLUDED.expires_at
    RETURNING id
"""

ROLE_ASSIGNMENT_DELETE = """
    DELETE FROM {schema}.role_assignments
    WHERE user_id = $1 AND role = $2 AND scope_type = $3 AND scope_id = $4
"""

ROLE_ASSIGNMENT_LIST_ACTIVE_ROLES = """
    SELECT role FROM {schema}.role_assignments
    WHERE user_id = $1
      AND ($2::text IS NULL OR (scope_type = $2 AND scope_id = $3))
      AND (expires_at IS NULL OR expires_at > NOW())
    ORDER BY role
"""

# Relation queries
RELATION_INSERT = """
    INSERT INTO {schema}.relations (
        id, subject_type, subject_id, relation, object_type, object_id, created_at
    ) VALUES ($1, $2, $3, $4, $5, $6, NOW())
    ON CONFLICT (subject_type, subject_id, relation, object_type, object_id) DO NOTHING
"""

RELATION_GET_ID = """
    SELECT id FROM {schema}.relations
    WHERE subject_type = $1 AND subject_id = $2 AND relation = $3
      AND object_type = $4 AND object_id = $5
"""

RELATION_DELETE = """
    DELETE FROM {schema}.relations
    WHERE subject_type = $1 AND subject_id = $2 AND relation = $3
      AND object_type = $4 AND object_id = $5
"""

# Permission check
PERMISSION_CHECK = """
    SELECT EXISTS (
        SELECT 1 FROM {schema}.role_assignments ra
        JOIN {schema}.role_permissions rp ON rp.role = ra.role
        WHERE ra.user_id = $1
          AND rp.permission = $2
          AND ($3::text IS NULL OR (ra.scope_type = $3 AND ra.scope_id = $4))
          AND (ra.expires_at IS NULL OR ra.expires_at > NOW())
    )
"""

ROLE_PERMISSION_INSERT = """
    INSERT INTO {schema}.role_permissions (role, permission)
    VALUES ($1, $2)
    ON CONFLICT (role, permission) DO NOTHING
"""
