"""
Socket event and room names
"""

# Rooms; clients enter and leave them with "join:<room>" / "leave:<room>"
LOCATIONS_ROOM = "locations"
FRIENDS_ROOM = "friends"
MESSAGES_ROOM = "messages"

# Location events
LOCATION_CREATED = "location:created"
LOCATION_UPDATED = "location:updated"
LOCATION_DELETED = "location:deleted"

# Friend events
FRIEND_REQUEST_RECEIVED = "friend:request:received"
FRIEND_REQUEST_ACCEPTED = "friend:request:accepted"
FRIEND_ADDED = "friend:added"
FRIEND_REMOVED = "friend:removed"

# Message events
MESSAGE_SENT = "message:sent"
MESSAGES_READ = "messages:read"


def user_room(user_id) -> str:
    """Personal room every authenticated socket joins on connect"""
    return f"user:{user_id}"
