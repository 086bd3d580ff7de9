""" Build script for pip and conda package. """
from setuptools import setup, find_packages

VERSION = "0.1.0"

def readme():
    """ Generate readme file. """
    try:
        with open("./readme.md", encoding="utf8") as file:
            return file.read()
    except IOError:
        return ""


setup(
    name="eviltransform",
    version=VERSION,
    description="Convert geometries between WGS-84, GCJ-02 and BD-09",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 2 - Alpha",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    packages=find_packages(exclude=["tests", "tests.*"]),
    zip_safe=True,
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "numba",
        "GDAL>=2.1",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
)
