from setuptools import find_packages, setup

setup(
    name="drive-mover",
    version="0.1.0",
    description="Move Google Drive files between folders and keep a rendered-page cache in step",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "cachetools>=5.0.0",
        "google-api-python-client>=2.100.0",
        "google-auth>=2.20.0",
        "google-auth-httplib2>=0.1.0",
        "httplib2>=0.20.0",
    ],
    entry_points={
        "console_scripts": [
            "drive-mover=drive_mover.__main__:main",
        ],
    },
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest",
            "build",
            "twine",
        ],
    },
)
