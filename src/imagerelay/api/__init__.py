"""Image Relay — FastAPI REST API layer.

This package contains the FastAPI application, Pydantic request/response
models, and the generation workflow.

Modules
-------
main
    ``create_app()`` factory with all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response validation.
generation
    Sequential upstream calls, hashing, and audit logging for
    ``POST /generate``.
"""
