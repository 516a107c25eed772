"""
Core functionality for the ytscribe transcript service.

This package contains the video metadata resolver, the caption sources and
the fallback orchestrator that sequences them, the summary client and the
markdown composer.
"""
