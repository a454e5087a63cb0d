"""
Real HTTP integration clients.

These clients communicate with the real external systems:
- Google Drive (folder listing, file content, metadata)
- Cloudinary (image upload / mirroring)

Important:
- Must implement the same interfaces as the mock clients
- Must raise the errors defined in drive_catalog/integrations/contracts/errors.py

Switching:
The selection of mock vs real clients happens in drive_catalog/api/main.py only.
"""
