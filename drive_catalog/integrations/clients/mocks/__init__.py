"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- Google Drive / Cloudinary credentials are not configured
- We want to test the catalog end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.

Switching to real:
drive_catalog/api/main.py picks clients/real_http/* when credentials are set.
"""
