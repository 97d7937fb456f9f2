"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: File extensions, form field names, response messages
- exceptions: Custom exception hierarchy
- ingress: HTTP request helpers and catalog engine factory
- access: Delete-permission check collaborator
"""
