"""
Resource Check Configuration
Centralized config for AWS client settings, retries and API runtime
"""

import os
from typing import Dict, Any, Optional

from botocore.config import Config
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# CHECK SETTINGS
# ============================================================================

class CheckConfig:
    """Centralized resource check configuration"""

    # ========================================================================
    # REGION / ENDPOINT - Where the AWS clients point
    # ========================================================================

    @classmethod
    def get_region(cls) -> str:
        """
        Region used for every client unless overridden

        ENV: AWS_REGION=us-east-1
        Default: us-east-1
        """
        return os.getenv('AWS_REGION') or 'us-east-1'

    @classmethod
    def get_endpoint_url(cls) -> Optional[str]:
        """
        Custom endpoint (localstack and friends)

        ENV: AWS_ENDPOINT_URL=http://localhost:4566
        Default: none, use the public AWS endpoints
        """
        return os.getenv('AWS_ENDPOINT_URL') or None

    # ========================================================================
    # RETRIES / TIMEOUTS - Handed to botocore, never retried here
    # ========================================================================

    @classmethod
    def get_max_attempts(cls) -> int:
        """
        Total attempts per API call, including the first one

        ENV: AWS_MAX_ATTEMPTS=5
        Default: 5
        """
        try:
            return int(os.getenv('AWS_MAX_ATTEMPTS', '5'))
        except ValueError:
            return 5

    @classmethod
    def get_connect_timeout(cls) -> int:
        """ENV: AWS_CONNECT_TIMEOUT (seconds), default 10"""
        try:
            return int(os.getenv('AWS_CONNECT_TIMEOUT', '10'))
        except ValueError:
            return 10

    @classmethod
    def get_read_timeout(cls) -> int:
        """ENV: AWS_READ_TIMEOUT (seconds), default 30"""
        try:
            return int(os.getenv('AWS_READ_TIMEOUT', '30'))
        except ValueError:
            return 30

    @classmethod
    def get_botocore_config(cls) -> Config:
        """Build the botocore client config from the settings above"""
        return Config(
            retries={'max_attempts': cls.get_max_attempts(), 'mode': 'standard'},
            connect_timeout=cls.get_connect_timeout(),
            read_timeout=cls.get_read_timeout(),
        )

    @classmethod
    def get_client_args(cls) -> Dict[str, Any]:
        """
        Default keyword arguments for boto3.client()

        Per-resource client_args are merged on top of these.
        """
        args = {
            'region_name': cls.get_region(),
            'config': cls.get_botocore_config(),
        }
        endpoint_url = cls.get_endpoint_url()
        if endpoint_url:
            args['endpoint_url'] = endpoint_url
        return args

    # ========================================================================
    # API - Flask runtime
    # ========================================================================

    @classmethod
    def get_api_port(cls) -> int:
        """
        ENV: API_PORT=5000
        Default: 5000
        """
        try:
            return int(os.getenv('API_PORT', '5000'))
        except ValueError:
            return 5000

    @classmethod
    def is_development(cls) -> bool:
        """ENV: FLASK_ENV=development enables the Flask debugger"""
        return os.getenv('FLASK_ENV') == 'development'

    # ========================================================================
    # DEBUG/LOGGING
    # ========================================================================

    @classmethod
    def get_debug_mode(cls) -> bool:
        """Enable debug logging"""
        return os.getenv('CHECKS_DEBUG', 'false').lower() == 'true'

    @classmethod
    def print_config(cls):
        """Print current configuration for debugging"""
        print("\n" + "="*80)
        print("RESOURCE CHECK CONFIGURATION")
        print("="*80)

        print(f"\nAWS CLIENTS:")
        print(f"   Region: {cls.get_region()}")
        print(f"   Endpoint: {cls.get_endpoint_url() or 'default'}")
        print(f"   Max attempts: {cls.get_max_attempts()}")
        print(f"   Timeouts: connect={cls.get_connect_timeout()}s read={cls.get_read_timeout()}s")

        print(f"\nAPI:")
        print(f"   Port: {cls.get_api_port()}")
        print(f"   Development: {cls.is_development()}")

        print(f"\nDEBUG: {cls.get_debug_mode()}")
        print("="*80 + "\n")
