# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- created_at: timestamptz (default: now())

Users are anonymous, name-only records created on sign-in. They are never
updated or deleted; rooms, memberships, trays and eggs reference them by id.
"""
