"""
rdfldp setup script.

Proudly ripped from https://github.com/pypa/sampleproject/blob/master/setup.py
"""

# Always prefer setuptools over distutils
from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
from os import path

import rdfldp

# Get the long description from the README file
readme_fpath = path.join(path.dirname(rdfldp.basedir), 'README.rst')
with open(readme_fpath, encoding='utf-8') as f:
    long_description = f.read()

# Great reference read about dependency management:
# https://caremad.io/posts/2013/07/setup-vs-requirement/
install_requires = [
    'PyYAML',
    'Werkzeug',
    'arrow',
    'click',
    'click-log',
    'rdflib>=6.0',
    'requests',
]


setup(
    name='rdfldp',
    version=rdfldp.release,

    description='Server-side resource model of the W3C Linked Data Platform.',
    long_description=long_description,

    license='Apache License Version 2.0',

    zip_safe=False,

    # https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 3 - Alpha',

        'Environment :: Console',

        'Intended Audience :: Developers',
        'Intended Audience :: Information Technology',
        'Intended Audience :: Science/Research',

        'License :: OSI Approved :: Apache Software License',

        'Natural Language :: English',

        'Programming Language :: Python :: 3',

        'Topic :: Database :: Database Engines/Servers',
        'Topic :: Software Development :: Libraries :: Application Frameworks',
    ],

    keywords='linked-data ldp rdf',

    python_requires='>=3.7',

    packages=find_packages(exclude=['contrib', 'docs', 'tests']),

    install_requires=install_requires,

    extras_require={
        'test': [
            'pytest',
        ],
    },

    include_package_data=True,
    package_data={
        'rdfldp': ['etc.defaults/*.yml'],
    },

    entry_points={
        'console_scripts': [
            'ldp-admin=rdfldp.admin:admin',
        ],
    },
)
