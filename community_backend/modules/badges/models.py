# Supabase tables: badges, userBadges
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py

"""
Expected Supabase table structure:

badges:
- id: text (primary key)
- name: text (not null)
- description: text (nullable)
- imageUrl: text (nullable)
- createdBy: text (foreign key to users.id, not null)
- createdAt: timestamptz (not null)

userBadges:
- id: text (primary key)
- userId: text (foreign key to users.id, not null)
- badgeId: text (foreign key to badges.id, not null)
- no unique constraint on (userId, badgeId); assigning the same badge twice
  creates two rows
"""
