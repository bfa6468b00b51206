from setuptools import setup

setup(
    name='bam_realigner',
    version='0.1.0',

    description='Building column-consistent pileups of reads around genomic regions by turning every read insertion into a shared gap column',

    packages=[
        'bam_realigner',
        'bam_realigner.test',
    ],

    package_data={
        'bam_realigner': [
            'test/layout_cases.yaml',
        ],
    },

    scripts=[
        'bam_realigner/bam-realigner',
    ],

    install_requires=[
        'hits>=0.3.3',
        'intervaltree>=3.0',
        'numpy>=1.14.2',
        'pandas>=0.22.0',
        'pysam>=0.14',
        'PyYAML>=3.12',
        'tqdm>=4.31.1',
    ],

    extras_require={
        'test': [
            'pytest>=6',
        ],
    },

    python_requires='>=3.7',

    classifiers=[
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.7',
    ],
)
