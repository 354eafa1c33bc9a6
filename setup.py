# -*- coding: utf-8 -*-
"""
jsonld-core
===========

jsonld-core is a Python JSON-LD_ processor.

.. _JSON-LD: http://json-ld.org/
"""

from setuptools import setup
import os

# get meta data
about = {}
with open(os.path.join(
        os.path.dirname(__file__), 'lib', 'jsonldcore', '__about__.py')) as fp:
    exec(fp.read(), about)

with open('README.rst') as fp:
    long_description = fp.read()

setup(
    name='jsonld-core',
    version=about['__version__'],
    description='A JSON-LD processor: expansion, compaction, flattening, '
                'framing, RDF conversion and normalization',
    long_description=long_description,
    long_description_content_type='text/x-rst',
    packages=['jsonldcore', 'jsonldcore.documentloader'],
    package_dir={'': 'lib'},
    license='BSD 3-Clause license',
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet',
        'Topic :: Software Development :: Libraries',
    ],
    install_requires=[],
    extras_require={
        'requests': ['requests'],
        'aiohttp': ['aiohttp'],
        'turtle': ['rdflib>=6.2'],
        'tests': ['pytest', 'rdflib>=6.2', 'requests'],
    },
    entry_points={
        'console_scripts': [
            'jsonld-core = jsonldcore.cli:main',
        ],
    },
)
