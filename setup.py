"""
Setup script for Gompertz Tails package
"""

from setuptools import setup, find_packages
import os

# Read README for long description
def read_file(filename):
    filepath = os.path.join(os.path.dirname(__file__), filename)
    for enc in ('utf-8-sig', 'utf-8', 'latin-1'):
        try:
            with open(filepath, encoding=enc) as f:
                return f.read()
        except (UnicodeDecodeError, LookupError, FileNotFoundError):
            continue
    return ''

setup(
    name='gompertz-tails',
    version='0.1.0',
    description='Heavy-tailed Gompertz state-space models for population abundance series',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    license='MIT',

    # Package discovery from src/
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"gompertz_tails": ["data/*.csv"]},

    python_requires='>=3.10',

    install_requires=[
        'numpy>=1.21.0',
        'scipy>=1.7.0',
        'matplotlib>=3.5.0',
        'seaborn>=0.11.0',
        'pandas>=1.3.0',
        'tqdm>=4.62.0',
        'pymc>=5.10.0',
        'arviz>=0.12.0,<1.0',
        'pytensor>=2.18.0',
        'xarray>=2022.6.0',
    ],

    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=3.0.0',
            'black>=22.0.0',
            'flake8>=4.0.0',
        ],
    },

    entry_points={
        'console_scripts': [
            'gompertz-tails-demo=gompertz_tails.workflow:demo_nu_comparison',
        ],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Intended Audience :: Education',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Bio-Informatics',
    ],

    keywords='bayesian gompertz population-dynamics heavy-tails pymc ecology',
)
