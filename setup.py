# Standard setup.py file for building and installing the package.

from setuptools import setup, find_packages

setup(
    name='LatticePulse',
    version='0.1',
    packages=find_packages(include=['lattice_pulse', 'lattice_pulse.*']),
    install_requires=[
        'warp-lang',
        'numpy',
        'pyvista',
        'pydantic>=2',
        'ruamel.yaml',
    ],
    extras_require={
        'test': ['pytest'],
        'examples': ['matplotlib'],
    },
    entry_points={
        'console_scripts': ['lattice-pulse=lattice_pulse.run:main'],
    },
    license='Apache License 2.0',
)
