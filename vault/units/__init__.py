"""
units - Book-backed collaborators for the share engine.

- share: the claim-token unit and its ClaimToken adapter
- asset: the base-asset unit and its CustodyTransport adapter
"""
