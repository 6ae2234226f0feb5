from setuptools import setup, find_packages

setup(
    name="timeout-benchmark",
    version="0.1.0",
    packages=find_packages(include=['timeout_benchmark', 'timeout_benchmark.*']),
    install_requires=[
        'pyyaml>=5.1',
        'requests>=2.25.0',
        'urllib3>=1.26',
        'click>=8.0',
        'rich>=12.0',
        'pydantic>=2.0',
        'psutil>=5.8',
        'numpy>=1.20',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'timeout-benchmark=timeout_benchmark.cli:main',
        ],
    },
    python_requires='>=3.8',
)
