from setuptools import setup, find_packages

setup(
    name='simpleredis',
    version='1.0',
    description='A minimal blocking client for the Redis request/reply protocol',
    packages=find_packages(include=['simpleredis', 'simpleredis.*']),
    install_requires=[],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'simpleredis-cli = simpleredis.client.client_main:main',
        ],
    },
    python_requires='>=3.9',
)
