"""
Application Constants for the OPC Diary data store.

Centralizes logical key names, sender markers, defaults and seed content.

Note: Dynamic configuration (from environment variables) lives in config.py.
This file only contains true constants that don't change between environments.
"""

# =============================================================================
# Logical Store Keys
# =============================================================================

USERS_KEY = "users"
LAST_ACTIVE_USER_KEY = "last_active_user"
PROJECTS_KEY_PREFIX = "projects_"
CONNECTIONS_KEY = "connections"
SUPERVISOR_TRACKING_KEY = "supervisor_tracking"
INSTRUCTIONS_KEY_PREFIX = "instructions_"
CHAT_KEY_PREFIX = "chat_"
FORUM_POSTS_KEY = "forum_posts"
JOINED_GROUPS_KEY = "joined_groups"
ADDED_FRIENDS_KEY = "added_friends"

# =============================================================================
# Message Sender Markers
# =============================================================================

SUPERVISOR_SENDER = "SUPERVISOR"  # Supervisor side of an instructions thread
USER_SENDER = "USER"  # User side of an instructions thread

# =============================================================================
# Supervisor Identity
# =============================================================================

SUPERVISOR_COMPANY_NAME = "Supervisor"
SUPERVISOR_TITLE = "System Admin"

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_PROJECT_DESCRIPTION = "A new journey begins."
DEFAULT_STAGE = "Idea"
DEFAULT_USER_TITLE = "Solo Founder"
DEFAULT_FORUM_TAGS = ["Discussion"]
AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
GUEST_AVATAR_URL = AVATAR_URL_TEMPLATE.format(seed="Guest")

DAY_MS = 1000 * 60 * 60 * 24

# =============================================================================
# Simulated Directory
# =============================================================================

# Non-interactive counterparties: following one of them is auto-accepted.
SIMULATED_DIRECTORY = [
    {"id": "g1", "name": "SaaS Makers", "avatar": "#3B82F6", "description": "Building software services.", "type": "group"},
    {"id": "g2", "name": "Indie Hackers", "avatar": "#10B981", "description": "Profitable side projects.", "type": "group"},
    {"id": "u1", "name": "DevSarah", "avatar": AVATAR_URL_TEMPLATE.format(seed="Sarah"), "description": "Building a CRM for cats.", "type": "user"},
    {"id": "u2", "name": "CodeMike", "avatar": AVATAR_URL_TEMPLATE.format(seed="Mike"), "description": "AI generated poetry.", "type": "user"},
]

SIMULATED_NAMES = frozenset(entry["name"] for entry in SIMULATED_DIRECTORY)

# =============================================================================
# Forum Seed Content
# =============================================================================


def seed_forum_posts(now_ms: int) -> list:
    """Raw seed posts shown until the forum key is first written."""
    return [
        {
            "id": "f1",
            "author": {
                "name": "CodeMike",
                "avatar": AVATAR_URL_TEMPLATE.format(seed="Mike"),
                "title": "AI Poet",
            },
            "content": (
                "Just launched my MVP on Product Hunt! The feedback is overwhelming but I found "
                "a critical bug in the login flow. Anyone else deal with post-launch panic?"
            ),
            "category": "Launch",
            "timestamp": now_ms - 10_000_000,
            "likes": 42,
            "likedBy": [],
            "comments": 2,
            "commentsList": [
                {
                    "id": "c1",
                    "author": {"name": "DevSarah", "avatar": AVATAR_URL_TEMPLATE.format(seed="Sarah")},
                    "content": "Panic is part of the process! Fix it and move on.",
                    "timestamp": now_ms - 900_000,
                },
                {
                    "id": "c2",
                    "author": {"name": "Guest", "avatar": GUEST_AVATAR_URL},
                    "content": "Congrats on launching though!",
                    "timestamp": now_ms - 800_000,
                },
            ],
            "tags": ["Launch", "Bug Fix"],
        },
        {
            "id": "f2",
            "author": {
                "name": "DevSarah",
                "avatar": AVATAR_URL_TEMPLATE.format(seed="Sarah"),
                "title": "CatCRM Founder",
            },
            "content": (
                "Looking for recommendations on payment gateways that support crypto but are "
                "user friendly for non-techies. Any suggestions?"
            ),
            "category": "Help",
            "timestamp": now_ms - 5_000_000,
            "likes": 15,
            "likedBy": [],
            "comments": 0,
            "commentsList": [],
            "tags": ["Help", "Payments"],
        },
    ]
