"""
REST API implementation
"""

import logging
from typing import Optional

from flask import Flask, request, jsonify

from ...config import Settings, get_settings
from ...core import CourtAnalyticsError, EmptySequenceError, FrameOrderError
from ...io import PayloadError, parse_frames, parse_positions
from ...pipeline import AnalysisSession
from ...analytics.events import (
    calculate_stats, generate_report, generate_feedback, MovementThresholds
)
from ...utils import safe_json_convert

logger = logging.getLogger(__name__)


def create_api(settings: Optional[Settings] = None):
    """Create Flask REST API"""
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = 50 * 1024 * 1024  # 50MB max

    def current_settings() -> Settings:
        return settings if settings is not None else get_settings()

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        return jsonify({'status': 'healthy'})

    @app.route('/track', methods=['POST'])
    def track():
        """Track a frame sequence and return its summary and per-frame states"""
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({'success': False, 'error': 'Request body must be JSON'}), 400

        try:
            sequence = parse_frames(payload)
            session = AnalysisSession(
                sequence.frame_width, sequence.frame_height,
                settings=current_settings(), court=sequence.court
            )
            summary = session.process_sequence(sequence.frames)
        except (PayloadError, EmptySequenceError, FrameOrderError) as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        except CourtAnalyticsError as e:
            logger.exception("Tracking request failed")
            return jsonify({'success': False, 'error': str(e)}), 500

        return jsonify({
            'success': True,
            'data': safe_json_convert(summary.to_dict()),
            'frames': safe_json_convert([frame.to_dict() for frame in session.frames])
        })

    @app.route('/analyze-movement', methods=['POST'])
    def analyze_movement():
        """Movement statistics, report and feedback for one entity's coordinates"""
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = {}
        coordinates = payload.get('coordinates')
        if not isinstance(coordinates, list) or len(coordinates) < 2:
            return jsonify({
                'success': False,
                'error': 'At least two coordinates are required'
            }), 400

        try:
            pixels_to_unit = float(payload.get('pixels_to_unit', 1.0))
            if pixels_to_unit <= 0:
                raise PayloadError("pixels_to_unit must be positive")
            positions = parse_positions(coordinates, time_unit=payload.get('time_unit', 's'))
        except (PayloadError, TypeError, ValueError) as e:
            return jsonify({'success': False, 'error': str(e)}), 400

        stats = calculate_stats(
            positions, pixels_to_unit, MovementThresholds.from_settings(current_settings())
        )
        player_name = str(payload.get('player_name') or payload.get('playerName') or 'Player')
        return jsonify({
            'success': True,
            'data': safe_json_convert(stats.to_dict()),
            'report': generate_report(stats),
            'feedback': generate_feedback(stats, player_name)
        })

    return app


def run_api(host: str = '0.0.0.0', port: int = 5000, debug: bool = False):
    """Run REST API server"""
    app = create_api()
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_api()
