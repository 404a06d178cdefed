"""Real-time delivery — Server-Sent Events, one session per connection.

Learn: There is no broker in between. Every connected client owns a
StreamSession that polls upstream on its own cadence and writes straight
to its response:

  upstream fetch → normalize → SSE frame → client

Nothing is shared between sessions, so no locks are needed.
"""
