"""
Server modules for the Comment Canvas application.

This package contains FastAPI router modules for the guest comment API,
the photo catalog, the SSE comment stream and WebSocket host displays.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""
