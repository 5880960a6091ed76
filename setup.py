"""
Setup script for MAF Machine
Run: pip install -e .[test]
"""

from setuptools import find_packages, setup

setup(
    name='maf-machine',
    version='1.0.0',
    description='MAF heart-rate training analysis for Strava runs',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.10',
    install_requires=[
        'numpy',
        'pandas',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['maf-machine=maf_machine.cli:main'],
    },
)
