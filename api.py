#!/usr/bin/env python3
"""
Resource Check API
REST endpoints that run read-only AWS resource checks on request
"""

from flask import Flask, jsonify, request
from flask_cors import CORS
from datetime import datetime, timezone
import logging

from resource_checks import __version__
from resource_checks.connectors import (
    AwsConnection,
    CloudTrailTrail,
    IamRole,
    ConfigurationError,
    ProviderError,
)
from resource_checks.connectors.aws.config import CheckConfig

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['AWS_CONNECTION_FACTORY'] = AwsConnection
CORS(app)

# ============================================================================
# HELPERS
# ============================================================================

def new_connection() -> AwsConnection:
    """One connection per request, one inspection session per resource"""
    return app.config['AWS_CONNECTION_FACTORY']()

def wants_live() -> bool:
    """?live=true also evaluates the derived predicates (extra AWS calls)"""
    return request.args.get('live', 'false').lower() in ('1', 'true', 'yes')

def resource_response(resource):
    body = resource.to_dict(live=wants_live() and resource.exists)
    return jsonify(body), (200 if resource.exists else 404)

# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.errorhandler(ConfigurationError)
def handle_configuration_error(error):
    return jsonify({'error': 'ConfigurationError', 'message': str(error)}), 400

@app.errorhandler(ProviderError)
def handle_provider_error(error):
    logger.error(f"Provider error: {error}")
    return jsonify(error.to_dict()), 502

# ============================================================================
# API ROOT
# ============================================================================

@app.route('/api/')
def api_root():
    """API root - list available endpoints"""
    return jsonify({
        'service': 'AWS Resource Checks',
        'version': __version__,
        'endpoints': {
            '/api/health': 'API health check',
            '/api/cloudtrail/trails/<name>': 'CloudTrail trail settings (?live=true for status checks)',
            '/api/iam/roles/<name>': 'IAM role settings (?live=true for policy listings)',
        }
    }), 200

# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.route('/api/health', methods=['GET'])
def health_check():
    """API health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': 'AWS Resource Checks API'
    }), 200

# ============================================================================
# RESOURCE ENDPOINTS
# ============================================================================

@app.route('/api/cloudtrail/trails/<path:trail_name>', methods=['GET'])
def get_trail(trail_name):
    """GET /api/cloudtrail/trails/<name> - Trail attributes and predicates

    Query Parameters:
        trail_name: trail name or full trail ARN (slashes allowed)
        live: true to add logging, delivered_logs_days_ago and the
              event selector / log group checks
    """
    trail = CloudTrailTrail(trail_name, connection=new_connection())
    return resource_response(trail)

@app.route('/api/iam/roles/<role_name>', methods=['GET'])
def get_role(role_name):
    """GET /api/iam/roles/<name> - Role attributes and predicates"""
    role = IamRole(role_name, connection=new_connection())
    return resource_response(role)

# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG if CheckConfig.get_debug_mode() else logging.INFO)
    CheckConfig.print_config()

    print("\n" + "=" * 80)
    print("AWS Resource Checks API")
    print("=" * 80)
    print(f"\nApplication Running on: http://localhost:{CheckConfig.get_api_port()}")
    print("\nAPI Endpoints:")
    print("   GET /api/                              List all endpoints")
    print("   GET /api/health                        API health check")
    print("   GET /api/cloudtrail/trails/<name>      CloudTrail trail checks")
    print("   GET /api/iam/roles/<name>              IAM role checks")
    print("\nQuery Parameters:")
    print("   ?live=true                             Evaluate live predicates")
    print("\n" + "=" * 80 + "\n")

    app.run(
        host='0.0.0.0',
        port=CheckConfig.get_api_port(),
        debug=CheckConfig.is_development()
    )
