# Supabase tables: rooms, room_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

rooms:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- created_by: uuid (foreign key to users.id, not null)
- active_tray_id: uuid (foreign key to trays.id, nullable) - most recent tray
- created_at: timestamptz (default: now())
- index on (created_by)

room_members:
- id: uuid (primary key, default: gen_random_uuid())
- room_id: uuid (foreign key to rooms.id, not null)
- user_id: uuid (foreign key to users.id, not null)
- joined_at: timestamptz (not null)
- unique constraint on (room_id, user_id)
- index on (room_id), index on (user_id)

Memberships are never removed. The creator is inserted as the first member.
"""
