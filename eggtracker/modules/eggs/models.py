# Supabase table: eggs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

eggs:
- id: uuid (primary key, default: gen_random_uuid())
- tray_id: uuid (foreign key to trays.id, not null)
- position: integer (not null, 0..29)
- eaten_by: uuid (foreign key to users.id, nullable) - current claimant
- eaten_at: timestamptz (nullable) - set together with eaten_by
- unique constraint on (tray_id, position)
- index on (tray_id)

Eggs are inserted 30 at a time when their tray is created and are never
deleted. Claims are written with a conditional UPDATE filtered on eaten_by,
so two members racing for the same egg cannot both win.
"""
