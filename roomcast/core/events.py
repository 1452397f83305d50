# Signaling envelope type definitions.
# Acknowledgements reuse the request type (create-room, join-room, list-rooms).

# Room discovery / membership
LIST_ROOMS = "list-rooms"
CREATE_ROOM = "create-room"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
ROOM_PEERS = "room-peers"
PEER_JOINED = "peer-joined"

# Identity
SET_NAME = "set-name"
NAME_UPDATED = "name-updated"

# Host / listener permissions
RAISE_HAND = "raise-hand"
HAND_UPDATED = "hand-updated"
ALLOW_SPEAK = "allow-speak"
SPEAK_PERMISSION = "speak-permission"
SPEAK_PERMISSION_UPDATED = "speak-permission-updated"
HOST_MUTE_AUDIO = "host-mute-audio"
REMOTE_AUDIO_CONTROL = "remote-audio-control"
HOST_HIDE_VIDEO = "host-hide-video"
REMOTE_VIDEO_CONTROL = "remote-video-control"

# Text chat
CHAT_MESSAGE = "chat-message"

# WebRTC signaling (opaque payload relay)
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
