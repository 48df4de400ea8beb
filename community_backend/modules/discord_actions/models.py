# Supabase tables: discordRoles, memberGroupRoles, photoVerification
# This file documents the expected database schema
# Actual operations are handled via DocumentStore in service.py

"""
Expected Supabase table structure:

discordRoles:
- id: text (primary key)
- rolename: text (not null, unique) - always prefixed "group-"
- roleid: text (not null) - role id assigned by the Discord bot
- createdBy: text (foreign key to users.id, not null)
- date: timestamptz (not null)

memberGroupRoles:
- id: text (primary key)
- roleid: text (not null) - Discord role id
- userid: text (not null) - Discord member id
- date: timestamptz (not null)
- unique constraint on (roleid, userid)

photoVerification:
- id: text (primary key)
- userId: text (foreign key to users.id, not null)
- discordId: text (not null)
- discord: jsonb - {approved: bool, date: timestamptz, url: text}
- profile: jsonb - {approved: bool, date: timestamptz, url: text}
"""
