"""
Setup script for the HTTP Request Smuggling Detector.
"""

from setuptools import setup

setup(
    name="httpsmuggler",
    version="1.0.0",
    description="HTTP Request Smuggling Detector (CL.TE, TE.CL, TE.TE)",
    packages=[
        "httpsmuggler",
        "httpsmuggler.cli",
        "httpsmuggler.clients",
        "httpsmuggler.detectors",
        "httpsmuggler.utils",
    ],
    install_requires=[
        "click>=8.0.0",
        "colorama>=0.4.6",
        "rich>=10.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "httpsmuggler=httpsmuggler.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Information Technology",
        "Topic :: Security",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
)
