#!/usr/bin/env python

import os

from setuptools import find_packages, setup

# Package meta-data.
NAME = "energytensor"
DESCRIPTION = "Gradient Energy Tensor (GET operator) for 2D scalar images on CPU and GPU"
REQUIRES_PYTHON = ">=3.8.0"
VERSION = "0.1.0"

CUPY_VERSION = "12.3.0"

# What packages are required for this module to be executed?
REQUIRED = [
    "numpy>=1.20",
    "scipy>=1.8.0",
    "numexpr",
    "joblib",
    "dask",
    "arbol",
    "gputil",
]

# What packages are optional?
EXTRAS = {
    "source": [
        f"cupy=={CUPY_VERSION}",
    ],
    "cuda12x": [
        f"cupy-cuda12x=={CUPY_VERSION}",
    ],
    "cuda11x": [
        f"cupy-cuda11x=={CUPY_VERSION}",
    ],
    "test": [
        "pytest",
    ],
    "dev": [
        "flake8",
        "pytest",
        "coverage",
    ],
}

here = os.path.abspath(os.path.dirname(__file__))

# Import the README and use it as the long-description.
try:
    with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
        long_description = "\n" + f.read()
except FileNotFoundError:
    long_description = DESCRIPTION


# Where the magic happens:
setup(
    name=NAME,
    version=VERSION,
    description=DESCRIPTION,
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires=REQUIRES_PYTHON,
    packages=find_packages(exclude=["*.test", "*.test.*"]),
    install_requires=REQUIRED,
    extras_require=EXTRAS,
    include_package_data=True,
    license="BSD 3-Clause",
    classifiers=[
        # Trove classifiers
        # Full list: https://pypi.python.org/pypi?%3Aaction=list_classifiers
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Image Processing",
    ],
)
