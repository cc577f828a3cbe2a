"""Packaging for pixelscan.

Pure Python on top of numpy; Pillow decodes image files for the
``pixelscan`` command-line tool and ``pixelscan.image_io``.
"""

from setuptools import setup, find_packages


setup(
    name="pixelscan",
    version="0.1.0",
    description="Exact-silhouette pixel pattern search in raster images",
    packages=find_packages(include=["pixelscan", "pixelscan.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "Pillow",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pixelscan=pixelscan.cli:main",
        ],
    },
)
