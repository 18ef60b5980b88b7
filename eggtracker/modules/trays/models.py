# Supabase table: trays
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

trays:
- id: uuid (primary key, default: gen_random_uuid())
- room_id: uuid (foreign key to rooms.id, not null)
- label: text (not null) - e.g. "October 2026"
- created_by: uuid (foreign key to users.id, not null)
- created_at: timestamptz (default: now())
- index on (room_id)

Every tray owns exactly 30 eggs (see eggs/models.py). Starting a new tray
points rooms.active_tray_id at it; older trays are kept and stay readable.
"""
