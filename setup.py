# setup.py
from setuptools import setup, find_packages

setup(
    name="composter",
    version="0.3.0",
    description="CLI to bundle React components with their local imports and sync them with a Composter vault",
    author="Composter Contributors",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'composter=composter.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
