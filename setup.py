#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# Copyright (C) 2007-2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

from setuptools import setup

setup(
    name='couchview',
    version='0.1.0',
    description='Query and page through CouchDB views',
    long_description="""
    This is a Python library for querying CouchDB views. It compiles view
    queries, parses view results and pages through result sets too large for
    a single request, using a (key, document ID) cursor.""",
    license = 'BSD',
    classifiers = [
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: Database :: Front-Ends',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    packages = ['couchview', 'couchview.tests'],
    python_requires='>=3.6',
    install_requires=[
        "furl",
        "requests",
        "requests_toolbelt",
    ],
    test_suite='couchview.tests.__main__.suite',
    zip_safe=True,
)
