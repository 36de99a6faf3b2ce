# make sure every file can run on any computers, avoid absolute paths and undownloaded packages

#pip install setuptools first if not installed
from setuptools import setup, find_namespace_packages
import os


# Read requirements
def read_requirements():
    req_file = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    if os.path.exists(req_file):
        with open(req_file) as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return [
        "pyyaml",
        "numpy",
        "smbus2",
    ]

setup(
    name="balboa_ahrs",
    version="0.1.0",
    description="Kalman Filter Attitude and Heading Reference System",
    packages=find_namespace_packages(include=[
        'sensors',
        'sensors.*',
        'state_estimation',
        'state_estimation.*',
        'hardware',
        'hardware.*',
        'config',
        'config.*',
    ]),
    py_modules=['run_ahrs'],
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        'test': ['pytest'],
    },
    package_data={
        '': ['*.yaml', '*.yml'],
    },
    include_package_data=True,
)
