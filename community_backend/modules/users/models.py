# Supabase tables: users
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: text (primary key, references auth.users.id)
- username: text (unique, not null)
- discordId: text (nullable, unique) - Discord member snowflake
- first_name: text (nullable)
- last_name: text (nullable)
- created_at: timestamp (default: now())

Note: Authentication data (password, tokens) is stored in auth.users table
managed by Supabase Auth. This table only stores profile information.
"""
