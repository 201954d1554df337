"""
Database schema definitions for the photomap media store.

The media table indexes every gallery entry by a numeric row id, which is
what content references and document identifiers point at.
"""

MEDIA_KINDS = ("images", "video", "audio")

MEDIA_ID_SEQUENCE = "CREATE SEQUENCE IF NOT EXISTS media_id_seq START 1;"

MEDIA_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS media (
    id BIGINT PRIMARY KEY DEFAULT nextval('media_id_seq'),
    kind TEXT NOT NULL,
    data TEXT NOT NULL,
    display_name TEXT NOT NULL,
    description TEXT,
    mime_type TEXT NOT NULL,
    date_added TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

MEDIA_TABLE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_media_kind ON media(kind);",
    "CREATE INDEX IF NOT EXISTS idx_media_date_added ON media(date_added DESC);",
]

ALL_SCHEMA_STATEMENTS = [MEDIA_ID_SEQUENCE, MEDIA_TABLE_SCHEMA] + MEDIA_TABLE_INDEXES

REQUIRED_COLUMNS = {
    "id",
    "kind",
    "data",
    "display_name",
    "description",
    "mime_type",
    "date_added",
}


def get_schema_statements() -> list[str]:
    """
    Get all database schema creation statements.

    Returns:
        List of SQL statements to create the sequence, table and indexes
    """
    return ALL_SCHEMA_STATEMENTS


def validate_schema_compatibility() -> bool:
    """Check that every required column appears in the table definition."""
    schema_lower = MEDIA_TABLE_SCHEMA.lower()
    return all(column in schema_lower for column in REQUIRED_COLUMNS)
