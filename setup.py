from setuptools import setup, find_packages

setup(
    name="file-io-benchmark",
    version="0.1.0",
    packages=find_packages(include=['iobench', 'iobench.*']),
    install_requires=[
        'pyyaml>=5.1',
        'hdrhistogram>=0.10.3',
        'numpy>=1.21',
        'pydantic>=2.0',
        'click>=8.0',
        'rich>=12.0',
        'psutil>=5.8',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'iobench=iobench.cli:main',
        ],
    },
    python_requires='>=3.9',
)
