#!/usr/bin/python
import os

from setuptools import find_packages
from setuptools import setup

__version__ = '0.1.0'


def read(f):
    return open(os.path.join(os.path.dirname(__file__), f)).read().strip()


setup(
    name='py_zipkin_reporter',
    version=__version__,
    provides=["py_zipkin_reporter"],
    description='Reports finished tracing spans to Zipkin as v1 spans.',
    long_description='\n\n'.join((read('README.md'), read('CHANGELOG.rst'))),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=('tests*', 'tools*')),
    package_data={
        'py_zipkin_reporter.thrift': ['*.thrift', '*.pyi'],
    },
    python_requires='>=3.7',
    install_requires=[
        'thriftpy2>=0.4.0',
        'typing-extensions>=3.10.0.0',
    ],
    extras_require={
        'tests': ['pytest'],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
    ],
)
