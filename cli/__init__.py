"""
Hydration CLI - route-driven hydration engine tooling

Commands:
- hydration route parse/format - URL codec
- hydration plan - Preview the commands a URL would trigger
- hydration simulate - Run the engine against a fixture backend
"""

__version__ = "0.1.0"
