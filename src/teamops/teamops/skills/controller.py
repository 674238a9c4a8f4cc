from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_user, login_required, no_content, parse_body, query_int
from ..container import Container
from .schemas import CategoryCreate, CategoryUpdate, SkillCreate, SkillEvaluationCreate, SkillUpdate


def register(app: Flask, container: Container) -> None:
    svc = container.skill_service

    @app.route("/api/skill-categories", methods=["GET"], endpoint="skill_categories_list")
    @login_required
    def list_categories():
        return jsonify(svc.list_categories(current_user()))

    @app.route("/api/skill-categories", methods=["POST"], endpoint="skill_categories_create")
    @login_required
    def create_category():
        return jsonify(svc.create_category(current_user(), parse_body(CategoryCreate))), 201

    @app.route("/api/skill-categories/<int:category_id>", methods=["PUT"], endpoint="skill_categories_update")
    @login_required
    def update_category(category_id: int):
        return jsonify(svc.update_category(current_user(), category_id, parse_body(CategoryUpdate)))

    @app.route("/api/skill-categories/<int:category_id>", methods=["DELETE"], endpoint="skill_categories_delete")
    @login_required
    def delete_category(category_id: int):
        svc.delete_category(current_user(), category_id)
        return no_content()

    @app.route("/api/skill-categories/<int:category_id>/skills", methods=["POST"], endpoint="skills_create")
    @login_required
    def create_skill(category_id: int):
        return jsonify(svc.create_skill(current_user(), category_id, parse_body(SkillCreate))), 201

    @app.route(
        "/api/skill-categories/<int:category_id>/skills/<int:skill_id>", methods=["PUT"], endpoint="skills_update"
    )
    @login_required
    def update_skill(category_id: int, skill_id: int):
        return jsonify(svc.update_skill(current_user(), category_id, skill_id, parse_body(SkillUpdate)))

    @app.route(
        "/api/skill-categories/<int:category_id>/skills/<int:skill_id>", methods=["DELETE"], endpoint="skills_delete"
    )
    @login_required
    def delete_skill(category_id: int, skill_id: int):
        svc.delete_skill(current_user(), category_id, skill_id)
        return no_content()

    @app.route("/api/skill-matrix", methods=["GET"], endpoint="skill_matrix")
    @login_required
    def skill_matrix():
        return jsonify(
            svc.matrix(
                current_user(),
                company=request.args.get("company") or None,
                category_id=query_int("categoryId"),
                min_level=query_int("minLevel"),
            )
        )

    @app.route("/api/members/<int:member_id>/skills", methods=["GET"], endpoint="member_skills_list")
    @login_required
    def member_skills(member_id: int):
        return jsonify(svc.member_history(current_user(), member_id))

    @app.route("/api/members/<int:member_id>/skills", methods=["POST"], endpoint="member_skills_create")
    @login_required
    def add_member_skill(member_id: int):
        return jsonify(svc.add_member_skill(current_user(), member_id, parse_body(SkillEvaluationCreate))), 201
