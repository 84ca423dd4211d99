"""
Survey Document Core

The data model and rules behind a single building survey document that
many independent sub-forms edit incrementally.

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rich-text editing
    - Image upload or storage
    - Report rendering
    - Authentication, routing or persistence transport

It takes plain data in and returns plain data and status codes.

Layers:
    model / identifiers   - the document tree and id namespaces
    tree                  - find-or-create, upsert, remove, toggle, lookups
    resolver              - pick-list options and local definitions
    levels                - level 2 / level 3 text selection
    status / schemas      - cached and computed completion status
    progress              - whole-survey progress
"""

__version__ = "0.1.0"
