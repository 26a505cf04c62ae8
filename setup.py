#!/usr/bin/env python
# -*- coding: utf-8 -*-
# ----------------------------------------------------------------------------
# cmdscope
# 
# This file is part of the cmdscope project.
# 
# Copyright (c) 2026, the cmdscope developers
# 
# Licensed under the MIT License (see LICENSE for details)
# ----------------------------------------------------------------------------

from setuptools import setup, find_packages
import os

# Function to extract version number from the __init__.py file
def get_version():
    with open("src/cmdscope/__init__.py", "r") as f:
        for line in f:
            if line.startswith("__version__"):
                version = line.split('=')[1]
                version = version.replace("'", "").replace('"', "").strip()
                return version

# Read the long description from the local README
long_description = ''
if os.path.exists('README.md'):
    with open('README.md', 'r', encoding='utf-8') as f:
        long_description = f.read()

setup(
    name='cmdscope',
    version=get_version(),
    description='Classical Multidimensional Scaling with Goodness-of-Fit and Residual Diagnostics',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='MIT',
    packages=find_packages('src'),  # Automatically find packages in the src directory
    package_dir={'': 'src'},
    install_requires=[
        'numba',
        'numpy',
        'pandas',
        'scipy',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX',
        'Operating System :: MacOS',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
    ],
    python_requires='>=3.9',
    keywords='multidimensional scaling, classical mds, goodness of fit, dimensionality reduction',
)
