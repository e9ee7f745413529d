"""
finger - A WebFinger Server

This package implements a small WebFinger (RFC 7033) server. Resources are described in a
human-authored YAML file, attribute names can be shortened through a second YAML file of URN
aliases, and the server answers `/.well-known/webfinger` queries with JSON Resource Descriptors.

Key Components:
- app: Web application layer with request handlers, middleware and server lifecycle
- model: The WebFinger and Link models served to clients
- resolve: Subject normalization, alias resolution and construction of the in-memory index

Architecture Overview:
1. Startup:
   - Definition files are read and parsed
   - Every resource key is normalized into a canonical subject
   - Attribute names are resolved through the alias table and classified as links or properties
   - Any invalid definition aborts startup before the listener binds

2. Serving:
   - The index is published once and never mutated
   - Each request performs one exact lookup and one JSON encode
   - Failures are contained to the request that caused them

3. Shutdown:
   - The first interrupt drains in-flight requests
   - A second interrupt forces the process to exit
"""
