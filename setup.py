#!/usr/bin/env python
# -*- coding: utf-8 -*-
from pathlib import Path

from setuptools import find_packages, setup

readme_file = Path(__file__).parent / "README.md"
readme = readme_file.read_text(encoding="utf8") if readme_file.exists() else ""


setup(
    name='gio-sdk',
    version='0.3.0',
    description="Server-side GrowingIO client: validated, batched custom events.",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="GrowingIO",
    packages=find_packages(include=['gio', 'gio.*']),
    include_package_data=True,
    install_requires=[
        'httpx>=0.24',
        'pydantic>=2.0',
        'tenacity>=8.2',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    python_requires=">=3.9",
    license="MIT license",
    zip_safe=False,
    keywords='growingio analytics events',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
