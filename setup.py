"""
DDNS Sync.

Requires Python 3.8 or later.

@license MIT
"""

import setuptools

with open('README.md', 'r') as fh:
    long_description = fh.read()

setuptools.setup(
    name='ddns_sync',
    version='1.0.0',
    description='Keep DNS, UniFi firewall groups and Kubernetes load balancers on the current public IP',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=setuptools.find_packages(exclude=['tests']),
    python_requires='>=3.8',
    install_requires=[
        'requests>=2.23.0',
        'urllib3>=1.26',
        'dnspython>=2.0.0',
        'google-cloud-dns>=0.34.0',
        'google-api-core>=2.0.0',
        'google-auth>=2.0.0',
        'kr8s>=0.17.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': ['ddns-sync=ddns_sync:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
