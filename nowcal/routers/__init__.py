"""
Routers module - endpoint handlers organized by feature.

- google_auth: Google OAuth connect + callback
- events: /current-event JSON for the browser page
- display: static display page and the server-rendered kiosk page
- health: /api/health
"""
