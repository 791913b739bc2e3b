"""Live meeting updates over WebSocket.

Connections are grouped into rooms: every connection sits in its owner's
`user_<id>` room and joins `meeting_<id>` rooms on request. Rooms are
held in process memory, so fan-out only reaches clients connected to the
same worker.
"""
