"""Google Slides integration: credentials, gateway, sync and deck workflows."""
