#!/usr/bin/env python3
"""
Verify a generated Escape demonstration dataset
"""

import pickle
import sys

import numpy as np


def summarize_dataset(path):
    """Load a dataset pickle and return its summary statistics."""
    with open(path, 'rb') as f:
        data = pickle.load(f)

    observations = data['observations']
    actions = data['actions']
    sample_obs = observations[0]
    return {
        'observations': len(observations),
        'actions': len(actions),
        'action_distribution': np.bincount(actions, minlength=6).tolist(),
        'observation_keys': sorted(sample_obs.keys()),
        'entities_shape': sample_obs['entities'].shape,
        'entity_mask_shape': sample_obs['entity_mask'].shape,
        'levels_seen': sorted({int(obs['level'][0]) for obs in observations}),
        'success_rate': data.get('success_rate'),
    }


def verify_dataset(path='datasets/escape_demo_dataset.pkl'):
    """Verify the generated dataset"""
    print("🔍 Verifying Generated Dataset")
    print("=" * 50)

    try:
        summary = summarize_dataset(path)
    except FileNotFoundError:
        print(f"❌ Dataset not found: {path}")
        print("   Run scripts/escape/create_dataset.py first.")
        return False

    print("✅ Escape Dataset:")
    print(f"  - Observations: {summary['observations']}")
    print(f"  - Actions: {summary['actions']}")
    print(f"  - Action distribution: {summary['action_distribution']}")
    print(f"  - Observation keys: {summary['observation_keys']}")
    print(f"  - Entities shape: {summary['entities_shape']}")
    print(f"  - Entity mask shape: {summary['entity_mask_shape']}")
    print(f"  - Levels seen: {summary['levels_seen']}")
    if summary['success_rate'] is not None:
        print(f"  - Oracle success rate: {summary['success_rate']:.2%}")

    if summary['observations'] != summary['actions']:
        print("❌ Observation and action counts differ")
        return False
    return True


if __name__ == "__main__":
    ok = verify_dataset(*sys.argv[1:2])
    sys.exit(0 if ok else 1)
