from setuptools import setup, find_packages

setup(
    name='scanmon',
    version='0.1.0',
    description='An interactive helper that drives ClamAV scans and signature updates',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(where='src'),
    package_dir={'': 'src'},
    install_requires=[
        'requests',      # For webhook notifications
        'tqdm>=4.64.0',  # For progress bars
        'python-dotenv', # For environment configuration
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'scanmon=scanmon.main:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX :: Linux',
        'Operating System :: MacOS',
    ],
    python_requires='>=3.8',
)
