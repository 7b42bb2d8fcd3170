"""
Dataset class for loading Escape demonstration data
"""

import pickle
from pathlib import Path

import numpy as np
import torch
from torch.utils.data import Dataset

STATE_FEATURES = 8
DEFAULT_DATASET_FILE = Path(__file__).parent / 'escape_demo_dataset.pkl'


def state_vector(obs) -> np.ndarray:
    """Flatten the scalar part of an observation into a float vector."""
    return np.array([
        obs['player_pos'][0] / 300.0,
        obs['player_pos'][1] / 300.0,
        obs['lives'][0],
        obs['time_left'][0] / 30.0,
        obs['level'][0],
        obs['powerups_remaining'][0],
        obs['door_open'][0],
        obs['mode'][0],
    ], dtype=np.float32)


class DemoDataset(Dataset):
    """Dataset for loading Escape demonstration data"""

    def __init__(self, data_type='entity', dataset_file=None):
        """
        Initialize dataset

        Args:
            data_type: 'entity' (entity table + mask) or 'state' (flat scalar vector)
            dataset_file: Pickle written by scripts/escape/create_dataset.py
        """
        if data_type not in ('entity', 'state'):
            raise ValueError(f"Unknown data type: {data_type}")
        self.data_type = data_type

        dataset_file = Path(dataset_file) if dataset_file else DEFAULT_DATASET_FILE
        if not dataset_file.exists():
            raise FileNotFoundError(f"Dataset file not found: {dataset_file}")

        with open(dataset_file, 'rb') as f:
            data = pickle.load(f)

        self.observations = data['observations']
        self.actions = data['actions']
        if len(self.observations) != len(self.actions):
            raise ValueError(f"Dataset is inconsistent: {len(self.observations)} observations "
                             f"for {len(self.actions)} actions")

        print(f"✅ Loaded {data_type} dataset: {len(self.observations)} samples")

    def __len__(self):
        return len(self.observations)

    def __getitem__(self, idx):
        obs = self.observations[idx]
        action = int(self.actions[idx])

        if self.data_type == 'state':
            return torch.from_numpy(state_vector(obs)), action

        entities = torch.FloatTensor(obs['entities'])
        entity_mask = torch.BoolTensor(obs['entity_mask'])
        return entities, entity_mask, action

    def get_info(self):
        """Get dataset information"""
        sample_obs = self.observations[0]

        info = {
            'total_samples': len(self.observations),
            'data_type': self.data_type,
            'action_distribution': np.bincount(self.actions, minlength=6).tolist()
        }

        if self.data_type == 'state':
            info['state_features'] = STATE_FEATURES
        else:
            info['entity_features'] = sample_obs['entities'].shape[1]
            info['max_entities'] = sample_obs['entities'].shape[0]

        return info


if __name__ == "__main__":
    # Test dataset loading
    print("🧪 Testing Dataset Loading")
    print("=" * 40)

    entity_dataset = DemoDataset(data_type='entity')
    print(f"Entity dataset info: {entity_dataset.get_info()}")

    state_dataset = DemoDataset(data_type='state')
    print(f"State dataset info: {state_dataset.get_info()}")

    print("✅ All datasets loaded successfully!")
