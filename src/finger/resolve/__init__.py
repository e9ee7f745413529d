"""
Resource Resolution

This package turns raw resource definitions into the validated in-memory index served by the
application.

Key Components:
- uri.py: Syntactic checks for URIs and email addresses
- subject.py: Normalization of raw resource keys into canonical subjects
- fingers.py: Alias resolution, attribute classification and index construction
- reader.py: Reading and parsing the YAML definition files
- errors.py: Build-time exceptions

The resolution flow follows these steps:
1. Validate the alias table (every alias must map to an absolute URI)
2. Normalize each resource key into an `acct:` subject or an absolute URI
3. Resolve each attribute name through the alias table
4. Classify each attribute value as a link (URI) or a property (anything else)
5. Publish the complete index, or fail without publishing anything
"""
