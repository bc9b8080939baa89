from os import path
import io
from setuptools import setup, find_packages

with io.open(path.join(path.abspath(path.dirname(__file__)), 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name = 'objectcache',
    version = '1.0.0',
    description = 'Write-back local cache presenting remote objects as files',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license = 'GPL',

    packages = find_packages(),
    python_requires = '>=3.8',

    install_requires = [
        'boto3',
        'requests',
    ],

    extras_require = {
        'test': [
            'pytest',
        ],
    },

    entry_points = {
        'console_scripts': [
            'objectcache = objectcache.client.shell:main',
        ],
    }
)
