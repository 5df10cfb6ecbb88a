"""Detectors for HTTP Request Smuggling vulnerabilities.

This package contains detector modules for the classical desync types:
- CL.TE: Content-Length / Transfer-Encoding desync (time-based)
- TE.CL: Transfer-Encoding / Content-Length desync (time-based)
- TE.TE: obfuscated Transfer-Encoding handled differently (response-based)

Detectors only raise a suspicion; every finding needs manual confirmation.
"""

__all__ = ['cl_te_detector', 'te_cl_detector', 'te_te_detector']
