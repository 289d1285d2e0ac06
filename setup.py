from setuptools import setup, find_packages

setup(
    name='browser-manager',
    version='0.1.0',
    description='Resolve and download specific versions of Chromium-family browsers',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.10',
    install_requires=[
        'aiohttp',
        'aiofiles',
        'platformdirs',
        'PyYAML',
        'rich',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'browser-manager=browser_manager.cli:main',
        ],
    },
)
