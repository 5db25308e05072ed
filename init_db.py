"""Initialize Supabase database schema for the exam platform."""
import os
from dotenv import load_dotenv

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")

# SQL schema
SCHEMA_SQL = """
-- Question categories
CREATE TABLE IF NOT EXISTS categories (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name VARCHAR(100) NOT NULL,
    description TEXT DEFAULT '',
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- Question bank (answer shape depends on type)
CREATE TABLE IF NOT EXISTS questions (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    text TEXT NOT NULL,
    type VARCHAR(20) NOT NULL,
    options JSONB,
    answer JSONB,
    explanation TEXT DEFAULT '',
    category_id UUID REFERENCES categories(id) ON DELETE SET NULL,
    category_name VARCHAR(100) DEFAULT 'Unassigned',
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- Exam definitions: question_ids (fixed) or random_count (random), neither = all questions
CREATE TABLE IF NOT EXISTS exams (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title TEXT NOT NULL,
    description TEXT DEFAULT '',
    question_ids JSONB DEFAULT '[]'::jsonb,
    random_count INT CHECK (random_count IS NULL OR random_count > 0),
    created_at TIMESTAMPTZ DEFAULT NOW()
);

-- User profiles (uid = auth.users.id)
CREATE TABLE IF NOT EXISTS profiles (
    uid UUID PRIMARY KEY,
    name TEXT DEFAULT '',
    email TEXT DEFAULT '',
    is_admin BOOLEAN DEFAULT FALSE,
    badges JSONB DEFAULT '[]'::jsonb,
    attempts JSONB DEFAULT '[]'::jsonb
);

-- Submitted attempts; answers are index-aligned with question_ids
CREATE TABLE IF NOT EXISTS attempts (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id UUID NOT NULL REFERENCES profiles(uid) ON DELETE CASCADE,
    exam_id UUID NOT NULL,
    answers JSONB NOT NULL,
    question_ids JSONB,
    score INT NOT NULL CHECK (score BETWEEN 0 AND 100),
    timestamp TIMESTAMPTZ DEFAULT NOW()
);

-- Create indexes for performance
CREATE INDEX IF NOT EXISTS idx_questions_category_id ON questions(category_id);
CREATE INDEX IF NOT EXISTS idx_attempts_user_id ON attempts(user_id);
CREATE INDEX IF NOT EXISTS idx_attempts_score ON attempts(score DESC);
"""


def schema_statements() -> list[str]:
    return [s.strip() for s in SCHEMA_SQL.split(';') if s.strip()]


def main():
    print("Initializing Supabase schema...")
    print(f"URL: {SUPABASE_URL}")

    statements = schema_statements()
    for i, stmt in enumerate(statements, 1):
        first = next(line for line in stmt.splitlines() if not line.startswith("--"))
        print(f"Statement {i}/{len(statements)}: {first[:60]}...")

    print("\nNote: Due to Supabase client limitations, run this SQL in Supabase SQL Editor:")
    print(SCHEMA_SQL)
    print("Go to: https://app.supabase.com > SQL Editor > New Query")
    print("Then set is_admin = true on your own row in profiles to reach the Admin page.")


if __name__ == "__main__":
    main()
