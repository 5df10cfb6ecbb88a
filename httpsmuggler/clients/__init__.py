"""
Probe clients for the HTTP request smuggling scanner.

This package contains a raw HTTP/1.1 client designed to send non-RFC-compliant
byte streams and time how long the target takes to answer them.
"""
