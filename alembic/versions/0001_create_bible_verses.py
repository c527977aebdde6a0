"""Create bible_verses table

Revision ID: 0001_create_bible_verses
Revises:
Create Date: 2026-10-19
"""
from alembic import op


revision = "0001_create_bible_verses"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS bible_verses (
            id SERIAL PRIMARY KEY,
            reference VARCHAR(100) NOT NULL,
            book VARCHAR(50) NOT NULL,
            chapter INTEGER NOT NULL CHECK (chapter >= 1),
            verse VARCHAR(20) NOT NULL,
            text TEXT NOT NULL,
            translation VARCHAR(10) NOT NULL,
            category VARCHAR(50) NOT NULL,
            topic_tags TEXT[] NOT NULL DEFAULT '{}',
            is_active BOOLEAN NOT NULL DEFAULT TRUE,
            popularity_score INTEGER NOT NULL DEFAULT 5,
            is_authentic BOOLEAN NOT NULL DEFAULT FALSE,
            created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
        );

        CREATE UNIQUE INDEX IF NOT EXISTS idx_bible_verses_reference_translation
            ON bible_verses (reference, translation);

        CREATE INDEX IF NOT EXISTS idx_bible_verses_translation_popularity
            ON bible_verses (translation, popularity_score DESC);

        CREATE INDEX IF NOT EXISTS idx_bible_verses_book_chapter
            ON bible_verses (book, chapter);
        """
    )


def downgrade():
    op.execute(
        """
        DROP INDEX IF EXISTS idx_bible_verses_book_chapter;
        DROP INDEX IF EXISTS idx_bible_verses_translation_popularity;
        DROP INDEX IF EXISTS idx_bible_verses_reference_translation;
        DROP TABLE IF EXISTS bible_verses;
        """
    )
