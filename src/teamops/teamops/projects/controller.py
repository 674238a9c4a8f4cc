from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, login_required, no_content, parse_body, query_month
from ..container import Container
from .schemas import AssignmentCreate, PositionCreate, ProjectCreate, ProjectUpdate, WorkloadUpdate


def register(app: Flask, container: Container) -> None:
    svc = container.project_service

    @app.route("/api/projects", methods=["GET"], endpoint="projects_list")
    @login_required
    def list_projects():
        return jsonify(
            svc.list_projects(
                current_user(),
                company=request.args.get("company") or None,
                status=request.args.get("status") or None,
            )
        )

    @app.route("/api/projects", methods=["POST"], endpoint="projects_create")
    @login_required
    def create_project():
        return jsonify(svc.create_project(current_user(), parse_body(ProjectCreate))), 201

    @app.route("/api/projects/<int:project_id>", methods=["GET"], endpoint="projects_get")
    @login_required
    def get_project(project_id: int):
        return jsonify(svc.get_project(current_user(), project_id))

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="projects_update")
    @login_required
    def update_project(project_id: int):
        return jsonify(svc.update_project(current_user(), project_id, parse_body(ProjectUpdate)))

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="projects_delete")
    @login_required
    def delete_project(project_id: int):
        svc.delete_project(current_user(), project_id)
        return no_content()

    @app.route("/api/projects/<int:project_id>/positions", methods=["POST"], endpoint="positions_create")
    @login_required
    def add_position(project_id: int):
        return jsonify(svc.add_position(current_user(), project_id, parse_body(PositionCreate))), 201

    @app.route("/api/projects/<int:project_id>/assignments", methods=["GET"], endpoint="assignments_list")
    @login_required
    def list_assignments(project_id: int):
        return jsonify(svc.list_assignments(current_user(), project_id))

    @app.route("/api/projects/<int:project_id>/assignments", methods=["POST"], endpoint="assignments_create")
    @login_required
    def create_assignment(project_id: int):
        return jsonify(svc.create_assignment(current_user(), project_id, parse_body(AssignmentCreate))), 201

    @app.route(
        "/api/projects/<int:project_id>/assignments/<int:assignment_id>",
        methods=["PATCH"],
        endpoint="assignments_update",
    )
    @login_required
    def update_assignment(project_id: int, assignment_id: int):
        return jsonify(svc.update_workload(current_user(), project_id, assignment_id, parse_body(WorkloadUpdate)))

    @app.route(
        "/api/projects/<int:project_id>/assignments/<int:assignment_id>",
        methods=["DELETE"],
        endpoint="assignments_delete",
    )
    @login_required
    def delete_assignment(project_id: int, assignment_id: int):
        svc.delete_assignment(current_user(), project_id, assignment_id)
        return no_content()

    @app.route("/api/workload", methods=["GET"], endpoint="workload")
    @login_required
    def workload():
        return jsonify(svc.workload(current_user(), month=query_month(required=False)))
