"""
Core modules for tryon.

This package contains the request pipeline:
- Configuration management
- Image assets and encoding
- Instruction composition
- The Gemini call adapter
- Reply interpretation
"""
