"""
Notes Backend.

- api/: HTTP routes (notes, health)
- core/: configuration, logging, security, errors, uploads
- models/, repositories/, services/: note persistence and lifecycle
- schemas/: request/response models
- storage/: local disk and remote media image storage
"""
