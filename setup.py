# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="pathmanifest",
    version="0.1.0",
    description="Hierarchical index over flat (path, line count) source manifests",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["pathmanifest", "pathmanifest.*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'pathmanifest=pathmanifest.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
