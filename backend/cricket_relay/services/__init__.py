"""Domain services behind the Socket.IO transport."""
