# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="steamshelf",
    version="0.1.0",
    description="Discover, list and launch the games installed in local Steam libraries",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["steamshelf*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'steamshelf=steamshelf.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
