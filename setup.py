from setuptools import setup

from app.__version__ import __version_string__

setup(
    name="PyChip8",
    version=__version_string__,
    packages=["pychip8"],
    include_package_data=True,
    package_dir={"pychip8": "app/pychip8"},
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "rich",
        "returns",
        "bitarray",
    ],
    extras_require={
        "frontend": ["pygame"],
        "test": ["pytest"],
    },
    zip_safe=False,
)
